"""File and commit records produced by the VCS backend."""

from pydantic import BaseModel, ConfigDict

SHORT_SHA_LENGTH = 7


class FileEntry(BaseModel):
    """A tracked file's content hash and provenance at one ref."""

    model_config = ConfigDict(frozen=True)

    path: str
    blob_sha: str
    last_commit_sha: str

    @property
    def short_blob_sha(self) -> str:
        return self.blob_sha[:SHORT_SHA_LENGTH]

    @property
    def short_commit_sha(self) -> str:
        return self.last_commit_sha[:SHORT_SHA_LENGTH]


class CommitEntry(BaseModel):
    """One commit in a per-file log; logs are ordered newest first."""

    model_config = ConfigDict(frozen=True)

    sha: str
    date: str
