# Register every table on SQLModel metadata before fixtures build schemas
import madness.models  # noqa: F401
