# config.py
import os, json
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}")


class Config:
    # --- LLM question generation ---
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_TEMPERATURE = _float_env("OPENAI_TEMPERATURE", 0.7)
    OPENAI_MAX_TOKENS = _int_env("OPENAI_MAX_TOKENS", 4000)

    # --- Record store ---
    GAMES_COLLECTION = os.getenv("GAMES_COLLECTION", "games")
    SCORES_COLLECTION = os.getenv("SCORES_COLLECTION", "playerScores")
    SESSIONS_COLLECTION = os.getenv("SESSIONS_COLLECTION", "sessions")
    GAMES_FETCH_LIMIT = min(_int_env("GAMES_FETCH_LIMIT", 100), 100)

    # --- Server ---
    PORT = _int_env("PORT", 5001)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    @staticmethod
    def _resolve_firebase_cred_path() -> str | None:
        """
        Tries multiple ways to get a valid credential:
          1) FIREBASE_SERVICE_ACCOUNT_JSON (env contains the full JSON blob)
          2) GOOGLE_APPLICATION_CREDENTIALS (absolute or relative file path)
             - If relative or not found, try <repo>/firebase/credentials/<basename>
          3) First *.json found under <repo>/firebase/credentials
        Returns a string path if a file exists, or None if using JSON blob.
        Raises on total failure.
        """
        json_blob = os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON")
        if json_blob:
            try:
                json.loads(json_blob)
                return None
            except Exception as e:
                raise RuntimeError(f"Invalid FIREBASE_SERVICE_ACCOUNT_JSON: {e}") from e

        p = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        repo_root = Path(__file__).resolve().parent
        if p:
            p = p.strip().strip('"').strip("'")
            p = os.path.expanduser(os.path.expandvars(p))
            path = Path(p)

            if path.exists():
                return str(path)

            fallback = repo_root / "firebase" / "credentials" / path.name
            if fallback.exists():
                return str(fallback)

            rel_try = (repo_root / p).resolve()
            if rel_try.exists():
                return str(rel_try)

            raise FileNotFoundError(
                "Firebase credential file not found. Tried:\n"
                f" - {path}\n - {fallback}\n - {rel_try}\n"
                "Set FIREBASE_SERVICE_ACCOUNT_JSON or GOOGLE_APPLICATION_CREDENTIALS."
            )

        cred_dir = repo_root / "firebase" / "credentials"
        if cred_dir.exists():
            matches = list(cred_dir.glob("*.json"))
            if matches:
                return str(matches[0])

        raise FileNotFoundError(
            "No Firebase credentials found. Provide FIREBASE_SERVICE_ACCOUNT_JSON, "
            "or set GOOGLE_APPLICATION_CREDENTIALS, or put a JSON in firebase/credentials/."
        )
