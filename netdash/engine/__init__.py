"""Process execution, TCP scanning and the diagnostics facade."""
#
# PURPOSE:
# The "hands" of the engine: this package actually runs ping/traceroute/arp
# and opens sockets. Input has already been validated by netdash.toolkit
# before anything here is called.
#
# MODULES IN THIS PACKAGE:
# - **executor.py**: Spawns a diagnostic binary with an argv vector, enforces
#   a deadline, returns partial output on timeout
# - **port_scanner.py**: Batched concurrent TCP connect scan
# - **diagnostics.py**: DiagnosticsService, the single request/response
#   boundary (validate -> delegate -> structured result)
#
# WORKFLOW:
# Request -> DiagnosticsService -> validation -> platform profile builds argv
#   -> ProcessExecutor runs it -> parser -> result model
#
