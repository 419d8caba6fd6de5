from supabase import create_client, Client
from dotenv import load_dotenv
import os

from shared.errors import ConfigurationError

load_dotenv()


def get_supabase_client() -> Client:
    """Get initialized Supabase client using the service role key."""
    url: str | None = os.getenv("SUPABASE_URL")
    key: str | None = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

    if not url or not key:
        raise ConfigurationError(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set"
        )

    return create_client(url, key)
