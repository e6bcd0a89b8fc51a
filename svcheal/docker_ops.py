from __future__ import annotations

import docker
from docker.errors import DockerException, NotFound
from requests.exceptions import RequestException

from .control import ServiceAccessError
from .models import ServiceDescriptor, ServiceState
from .settings import settings


# docker-py lets transport failures (daemon restarted, socket dropped, read timeout) escape as requests errors.
_DOCKER_ERRORS = (DockerException, RequestException)


def _client() -> docker.DockerClient:
    return docker.from_env()


class DockerControl:
    """Treats containers as services, addressed by container name or id.

    The client is created lazily so a missing daemon is reported per service
    (as an access error) rather than at construction time.
    """

    def __init__(self, client: docker.DockerClient | None = None, timeout_s: int | None = None):
        self._client = client
        self.timeout_s = timeout_s if timeout_s is not None else settings.action_timeout_s

    def client(self) -> docker.DockerClient:
        if self._client is None:
            try:
                self._client = _client()
            except _DOCKER_ERRORS as e:
                raise ServiceAccessError(f"Docker is not available: {e}") from e
        return self._client

    def _get(self, name: str):
        return self.client().containers.get(name)

    def query(self, name: str) -> ServiceDescriptor:
        try:
            cont = self._get(name)
            cont.reload()
        except NotFound:
            return ServiceDescriptor(name=name, state=ServiceState.NOT_FOUND, detail="no such container")
        except _DOCKER_ERRORS as e:
            raise ServiceAccessError(f"Docker query for '{name}' failed: {e}") from e

        if cont.status == "running":
            return ServiceDescriptor(name=name, state=ServiceState.RUNNING, detail=cont.status)
        return ServiceDescriptor(name=name, state=ServiceState.NOT_RUNNING, detail=cont.status)

    def start(self, name: str) -> None:
        try:
            self._get(name).start()
        except _DOCKER_ERRORS as e:
            raise ServiceAccessError(f"Docker start of '{name}' failed: {e}") from e

    def restart(self, name: str, force: bool = True) -> None:
        # `docker restart` kills the container once the stop timeout runs out, which is the forced form.
        try:
            self._get(name).restart(timeout=self.timeout_s)
        except _DOCKER_ERRORS as e:
            raise ServiceAccessError(f"Docker restart of '{name}' failed: {e}") from e
