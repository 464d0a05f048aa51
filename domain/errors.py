"""
Domain Errors

Exception hierarchy for the snapshot pipeline. The split mirrors the two
failure classes the jobs treat differently: data-source failures are
recovered per item or per source, publish failures end the run.
"""


class SnapshotPipelineError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(SnapshotPipelineError):
    """Required configuration is missing or invalid."""


class SourceUnavailableError(SnapshotPipelineError):
    """An upstream data source could not be reached or refused the request."""


class MalformedPayloadError(SnapshotPipelineError):
    """An upstream source answered with a payload of the wrong shape."""


class PublishError(SnapshotPipelineError):
    """Writing an artifact to the blob store failed.

    Always fatal for the current run.
    """

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Failed to publish {path}: {cause}")
        self.path = path
        self.cause = cause
