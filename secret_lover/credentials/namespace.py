"""Mapping of logical (name, project) lookups onto backend service identifiers.

Every credential lives under a service identifier derived from a single
application namespace:

    secret-lover            global tier
    secret-lover/webapp     project tier for "webapp"

Lookups that name a project search the project tier first and the global
tier second. There is never a third tier.
"""

from secret_lover.exceptions import InvalidProjectError

SEPARATOR = "/"
GLOBAL_PROJECT = "global"


class NamespaceResolver:
    """Resolve project scopes to service identifiers under one namespace.

    Example:
        >>> resolver = NamespaceResolver("secret-lover")
        >>> resolver.resolve_service("webapp")
        'secret-lover/webapp'
        >>> resolver.tiers("webapp")
        ('secret-lover/webapp', 'secret-lover')
        >>> resolver.project_for_service("secret-lover")
        'global'
    """

    def __init__(self, namespace: str) -> None:
        if not namespace:
            raise ValueError("Application namespace cannot be empty")
        self.namespace = namespace

    def resolve_service(self, project: str | None = None) -> str:
        """Return the service identifier for ``project``.

        An absent or empty project selects the global tier. Project strings
        are used verbatim, without trimming.

        Raises:
            InvalidProjectError: If the project contains the tier separator
        """
        if not project:
            return self.namespace
        self.validate_project(project)
        return f"{self.namespace}{SEPARATOR}{project}"

    def tiers(self, project: str | None = None) -> tuple[str, ...]:
        """Return the services to search for ``project``, most specific first."""
        if not project:
            return (self.namespace,)
        return (self.resolve_service(project), self.namespace)

    def project_for_service(self, service: str) -> str | None:
        """Classify a service identifier by project.

        Returns:
            GLOBAL_PROJECT for the namespace itself, the project suffix for a
            project tier, or None when the service belongs to someone else
        """
        if service == self.namespace:
            return GLOBAL_PROJECT
        prefix = f"{self.namespace}{SEPARATOR}"
        if service.startswith(prefix):
            return service[len(prefix) :]
        return None

    @staticmethod
    def validate_project(project: str) -> None:
        """Reject project names that would be mistaken for a nested scope."""
        if SEPARATOR in project:
            raise InvalidProjectError(
                f"Project name cannot contain '{SEPARATOR}': {project!r}",
                suggestion="Use a project name without slashes, e.g. 'team-webapp'",
            )
