"""
Loading of email templates shipped in notifications/templates/.

Each template exists as ``<name>.html`` and ``<name>.txt``. When a file
cannot be read, a short built-in fallback is used so the email still goes out.
"""

from pathlib import Path
from typing import Literal

TEMPLATE_DIR = Path(__file__).parent / "templates"

NEW_SUBMISSION = "new_submission"
WEEKLY_DIGEST = "weekly_digest"

TemplateKind = Literal["html", "text"]

_EXTENSIONS = {"html": "html", "text": "txt"}

_FALLBACKS: dict[tuple[str, str], str] = {
    (NEW_SUBMISSION, "html"): """
<h1>New Submission Received</h1>
<p>You've received a new submission to your drop <strong>{{drop_label}}</strong>.</p>
<p><strong>Files:</strong> {{file_count}} file(s)</p>
<p><a href="{{dashboard_url}}">View in Dashboard</a></p>
""",
    (NEW_SUBMISSION, "text"): """
New Submission Received

You've received a new submission to your drop "{{drop_label}}".
Files: {{file_count}} file(s)

View in Dashboard: {{dashboard_url}}
""",
    (WEEKLY_DIGEST, "html"): """
<h1>Your Weekly Digest</h1>
<p>Here's a summary of your submissions from the past week:</p>
<p><strong>Total Submissions:</strong> {{total_submissions}}</p>
<p><strong>Total Files:</strong> {{total_files}}</p>
<p><a href="{{dashboard_url}}">View in Dashboard</a></p>
""",
    (WEEKLY_DIGEST, "text"): """
Your Weekly Digest

Here's a summary of your submissions from the past week:
Total Submissions: {{total_submissions}}
Total Files: {{total_files}}

View in Dashboard: {{dashboard_url}}
""",
}


def load_email_template(
    name: str, kind: TemplateKind, template_dir: Path | None = None
) -> str:
    """
    Read an email template, falling back to the built-in version.

    Args:
        name: Template name (NEW_SUBMISSION or WEEKLY_DIGEST)
        kind: 'html' or 'text'
        template_dir: Directory to read from (defaults to the bundled templates)

    Returns:
        Template source

    Raises:
        KeyError: If no template of that name/kind exists at all
    """
    path = (template_dir or TEMPLATE_DIR) / f"{name}.{_EXTENSIONS[kind]}"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"  ⚠️  Failed to read template {path.name}: {e}. Using fallback.")
        return _FALLBACKS[(name, kind)]
