# mirror <sysexits.h>
EXIT_OK = 0  # Normal success
EXIT_GENERIC = 1  # Generic failure (fallback)
EXIT_THRESHOLD = 2  # Coverage below a configured minimum
EXIT_DATAERR = 65  # Input data was invalid (e.g., malformed XML report)
EXIT_NOINPUT = 66  # Input missing (no execution data, class dirs or report)
EXIT_SOFTWARE = 70  # Test command or coverage engine failed
EXIT_CONFIG = 78  # Invalid configuration (e.g., bad [tool.covgate] table)
