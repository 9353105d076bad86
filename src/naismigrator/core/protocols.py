from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from naismigrator.fasit.resources import NaisResource, ResourceRequest
    from naismigrator.models.naisd import UsedResource


class ResourceRegistry(Protocol):
    """Defines the contract for resolving resources from a registry."""

    def resolve_scoped_resources(
        self,
        resource_requests: "list[ResourceRequest]",
        environment: str,
        application: str,
        zone: str,
    ) -> "list[NaisResource]":
        """
        Resolve every request, in order, prepending the default requests.

        Raises:
            FasitError: For the first request that cannot be resolved
        """
        ...

    def resolve_load_balancer_config(
        self, application: str, environment: str
    ) -> "NaisResource | None":
        """
        Look up the load balancer configuration of an application.

        Returns:
            A resource carrying only ingresses, or None if there is none
        """
        ...

    def fetch_all_resources(
        self,
        application: str,
        environment: str,
        zone: str,
        used_resources: "list[UsedResource]",
    ) -> "list[NaisResource]":
        """
        Resolve everything an application uses, plus its load balancer config.

        This is the entry point the migration pipeline calls.
        """
        ...
