"""Process exit codes surfaced by the rhodibot CLI."""

SUCCESS = 0
COMPLIANCE_FAILED = 1
SECURITY_WARNING = 2
INVALID_PATH = 3
INVALID_ARGS = 4

DESCRIPTIONS: dict[int, str] = {
    SUCCESS: "SUCCESS",
    COMPLIANCE_FAILED: "COMPLIANCE_FAILED",
    SECURITY_WARNING: "SECURITY_WARNING",
    INVALID_PATH: "INVALID_PATH",
    INVALID_ARGS: "INVALID_ARGS",
}
