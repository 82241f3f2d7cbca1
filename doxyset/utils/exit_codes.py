"""Centralized exit codes for the doxyset CLI."""


class ExitCodes:
    """Standard exit codes for doxyset CLI commands."""

    SUCCESS = 0

    WARNINGS = 1
    GENERATOR_FAILED = 2

    CONVERSION_FAILED = 3

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success - conversion completed",
            cls.WARNINGS: "Dangling references found in strict mode",
            cls.GENERATOR_FAILED: "One or more output generators failed",
            cls.CONVERSION_FAILED: "Conversion aborted by a fatal input error",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")
