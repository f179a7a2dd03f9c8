"""
Rate-limited error logging for PlanTables.

Recoverable failures (mostly storage problems) are printed where they
happen and recorded here, so they can be inspected later without ever
interrupting an editing session.

Error logs are saved to: {config_dir}/error_log.json
"""

import json
import traceback
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, List


# ============================================================================
# Constants
# ============================================================================

MAX_ERRORS_PER_SESSION = 100
MAX_LOG_ENTRIES = 500


# ============================================================================
# ErrorLog Singleton
# ============================================================================

class ErrorLog:
    """
    Session error log.

    Rate limiting rules:
    - Max 100 errors per session total
    - Deduplicate identical errors (same type + message)
    """

    _instance: Optional['ErrorLog'] = None

    @classmethod
    def get_instance(cls) -> 'ErrorLog':
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the singleton (the next get_instance() starts a new session)."""
        cls._instance = None

    def __init__(self, log_path: Optional[Path] = None):
        if log_path is None:
            # Import here to avoid circular imports
            from core.config import get_error_log_path
            log_path = get_error_log_path()

        self._log_path = Path(log_path)
        self._session_id = str(uuid.uuid4())[:8]
        self._error_count = 0
        self._seen_errors: Dict[str, int] = {}  # error_key -> count

    @property
    def log_path(self) -> Path:
        return self._log_path

    def log_error(
        self,
        error: Exception,
        context: Optional[str] = None,
        extra_data: Optional[Dict] = None
    ) -> bool:
        """
        Log a non-fatal error with rate limiting.

        Args:
            error: The exception to log
            context: Optional context string (e.g., "plan_load")
            extra_data: Optional additional data

        Returns:
            True if logged, False if rate-limited
        """
        if self._error_count >= MAX_ERRORS_PER_SESSION:
            return False

        # Create error key for deduplication
        error_key = f"{type(error).__name__}:{str(error)[:100]}"

        if error_key in self._seen_errors:
            # Increment count but don't log again
            self._seen_errors[error_key] += 1
            return False

        self._seen_errors[error_key] = 1
        self._error_count += 1

        entry = {
            "timestamp": datetime.now().isoformat(),
            "session_id": self._session_id,
            "error_type": type(error).__name__,
            "error_message": str(error)[:500],
            "context": context,
            "extra_data": extra_data,
            "traceback": "".join(traceback.format_exception(type(error), error, error.__traceback__))[:2000],
        }

        self._append(entry)
        return True

    def _append(self, entry: Dict):
        """Append an error entry to the log file."""
        try:
            log_data = self.read_entries()
            log_data.append(entry)

            # Keep only the most recent entries
            if len(log_data) > MAX_LOG_ENTRIES:
                log_data = log_data[-MAX_LOG_ENTRIES:]

            self._log_path.parent.mkdir(parents=True, exist_ok=True)
            self._log_path.write_text(
                json.dumps(log_data, indent=2, default=str),
                encoding='utf-8'
            )

        except Exception as e:
            # Never fail because of error logging
            print(f"[Error Log] Failed to write: {e}")

    def read_entries(self) -> List[Dict]:
        """Entries currently in the log file (empty if missing or unreadable)."""
        if not self._log_path.exists():
            return []
        try:
            log_data = json.loads(self._log_path.read_text(encoding='utf-8'))
        except (OSError, ValueError):
            return []
        return log_data if isinstance(log_data, list) else []

    def get_error_count(self) -> int:
        """Get number of errors logged this session."""
        return self._error_count

    def get_duplicate_count(self, error: Exception) -> int:
        """How many times an identical error was reported this session."""
        return self._seen_errors.get(f"{type(error).__name__}:{str(error)[:100]}", 0)


def log_error(error: Exception, context: str = None, extra_data: dict = None) -> bool:
    """Log a non-fatal error with rate limiting."""
    return ErrorLog.get_instance().log_error(error, context, extra_data)
