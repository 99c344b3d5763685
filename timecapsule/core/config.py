import os
from typing import Dict, Any, Optional
from supabase import create_client, Client
from dotenv import load_dotenv
import logging

load_dotenv()
logger = logging.getLogger(__name__)

DEFAULT_ENRICHMENT_URL = "http://127.0.0.1:8001/api/process-capsule-ai"

class Config:
    """Configuration class for the time capsule service and UI."""

    def __init__(self):
        # Supabase configuration
        self.supabase_url = os.getenv("SUPABASE_URL")
        self.supabase_anon_key = os.getenv("SUPABASE_ANON_KEY")
        self.supabase_key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

        # Gemini configuration
        self.gemini_api_key = os.getenv("GEMINI_API_KEY")
        self.gemini_model = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")

        # Enrichment dispatcher configuration from environment variables
        self.enrichment_url = os.getenv("ENRICHMENT_URL", DEFAULT_ENRICHMENT_URL)
        self.enrichment_timeout = float(os.getenv("ENRICHMENT_TIMEOUT", "60"))
        self.dispatcher_max_concurrent_jobs = int(os.getenv("DISPATCHER_MAX_CONCURRENT_JOBS", "3"))
        self.dispatcher_polling_interval = float(os.getenv("DISPATCHER_POLLING_INTERVAL", "1"))

        # Media storage configuration
        self.media_bucket = os.getenv("MEDIA_BUCKET", "capsule-media")
        self.max_media_bytes = int(os.getenv("MAX_MEDIA_BYTES", str(10 * 1024 * 1024)))
        self.signed_url_ttl = int(os.getenv("SIGNED_URL_TTL", str(60 * 60 * 24 * 365)))

    def _get_supabase_client(self) -> Client:
        """Get a Supabase client with service-role credentials."""
        if not self.supabase_url or not self.supabase_key:
            raise ValueError("Supabase service-role configuration missing")
        return create_client(self.supabase_url, self.supabase_key)

    def get_anon_client(self) -> Client:
        """Get a Supabase client with the public anon key (subject to row-level security)."""
        if not self.supabase_url or not self.supabase_anon_key:
            raise ValueError("Missing Supabase environment variables")
        return create_client(self.supabase_url, self.supabase_anon_key)

    def accepted_bearer_tokens(self) -> set:
        """Credentials accepted on the enrichment endpoint."""
        return {key for key in (self.supabase_anon_key, self.supabase_key) if key}

    def get_gemini_config(self) -> Dict[str, Optional[str]]:
        """Get Gemini configuration."""
        return {
            "model_name": self.gemini_model,
            "api_key": self.gemini_api_key
        }

    def get_dispatcher_config(self) -> Dict[str, Any]:
        """Get enrichment dispatcher configuration."""
        return {
            "url": self.enrichment_url,
            "timeout": self.enrichment_timeout,
            "max_concurrent_jobs": self.dispatcher_max_concurrent_jobs,
            "polling_interval": self.dispatcher_polling_interval,
            "token": self.supabase_anon_key
        }

config = Config()
