"""
Error taxonomy for the analysis and export pipeline.

Each error carries a stable `code` (what the client switches on) and the
HTTP status the API layer answers with.
"""


class PipelineError(Exception):
    code = "pipeline_error"
    status_code = 500

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message}


class ValidationError(PipelineError):
    """Missing or malformed URL / project. The caller's fault."""
    code = "invalid_request"
    status_code = 400


class PolicyError(PipelineError):
    """The target origin's robots policy disallows fetching."""
    code = "disallowed_by_robots"
    status_code = 403


class UpstreamFetchError(PipelineError):
    """Timeout, DNS/transport failure or non-2xx from the target page."""
    code = "fetch_failed"
    status_code = 502


class SynthesisError(PipelineError):
    """Bundle could not be built (stylesheet asset unreadable)."""
    code = "synthesis_failed"
    status_code = 500
