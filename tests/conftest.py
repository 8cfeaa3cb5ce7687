"""
Shared test fixtures and utilities.
"""
import asyncio
import pytest
from src.models.file_entry import FileRef, UploadResult
from src.repositories.upload_client import UploadClient


class FakeUploadClient(UploadClient):
    """Scripted upload collaborator that records call order."""

    def __init__(self, store=None):
        self.store = store
        self.outcomes = {}
        self.gates = {}
        self.started = {}
        self.events = []
        self.snapshots = []

    def succeed(self, filename, remote_id, **metadata):
        self.outcomes.setdefault(filename, []).append(UploadResult(remote_id=remote_id, metadata=metadata))

    def fail(self, filename, exc):
        self.outcomes.setdefault(filename, []).append(exc)

    def hold(self, filename):
        """Block the upload of filename until the returned gate is set. Call inside a running loop."""
        self.gates[filename] = asyncio.Event()
        self.started[filename] = asyncio.Event()
        return self.gates[filename]

    @property
    def calls(self):
        return [name for kind, name in self.events if kind == "start"]

    async def upload(self, file_ref):
        self.events.append(("start", file_ref.name))
        if self.store is not None:
            self.snapshots.append(self.store.snapshot())
        if file_ref.name in self.started:
            self.started[file_ref.name].set()
        if file_ref.name in self.gates:
            await self.gates[file_ref.name].wait()
        await asyncio.sleep(0)
        self.events.append(("end", file_ref.name))

        queued = self.outcomes.get(file_ref.name)
        outcome = queued.pop(0) if queued else UploadResult(remote_id=f"remote-{file_ref.name}")
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def make_file_ref():
    """Build FileRef objects for picked images."""
    def _make(name="photo.jpg", size=None, content_type="image/jpeg"):
        content = b"\xff\xd8\xff" + name.encode()
        return FileRef(
            name=name,
            size=len(content) if size is None else size,
            content_type=content_type,
            content=content
        )
    return _make


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mock AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def make_fake_client():
    """Build FakeUploadClient instances, optionally snapshotting a store on each call."""
    def _make(store=None):
        return FakeUploadClient(store=store)
    return _make
