"""fnstack exception hierarchy.

Every error raised while building a stack derives from ``StackBuildError``.
All of them are fatal to the build: fix the declarations and run it again.
``StackBuildError`` subclasses ``ValueError`` so callers that only catch
``ValueError`` from the loaders keep working.
"""

from __future__ import annotations

from typing import Iterable, Optional


class StackBuildError(ValueError):
    """Base for all build-time errors.

    Attributes:
        declaration: Name of the function declaration being assembled, when known.
    """

    def __init__(self, message: str, *, declaration: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.declaration = declaration

    def with_declaration(self, declaration: str) -> StackBuildError:
        """Attach the declaration name if the error does not carry one yet."""
        if self.declaration is None:
            self.declaration = declaration
        return self

    def __str__(self) -> str:
        if self.declaration is not None:
            return f"[{self.declaration}] {self.message}"
        return self.message


class DeclarationError(StackBuildError):
    """Raised when a declaration document is structurally invalid."""


class UnknownFragment(StackBuildError):  # noqa: N818
    """A permission fragment name is not present in the catalog."""

    def __init__(
        self,
        fragment: str,
        available: Iterable[str] = (),
        *,
        declaration: Optional[str] = None,
    ) -> None:
        known = sorted(available)
        hint = f" Known fragments: {', '.join(known)}" if known else ""
        super().__init__(
            f"Unknown permission fragment '{fragment}'.{hint}",
            declaration=declaration,
        )
        self.fragment = fragment


class DuplicateFragment(StackBuildError):  # noqa: N818
    """The same fragment name is listed more than once for one identity."""

    def __init__(
        self, fragment: str, identity: str, *, declaration: Optional[str] = None
    ) -> None:
        super().__init__(
            f"Permission fragment '{fragment}' is listed more than once "
            f"for identity '{identity}'.",
            declaration=declaration,
        )
        self.fragment = fragment
        self.identity = identity


class UnknownBundle(StackBuildError):  # noqa: N818
    """A grant bundle referenced by name is not defined."""

    def __init__(self, bundle: str, *, declaration: Optional[str] = None) -> None:
        super().__init__(f"Unknown grant bundle '{bundle}'.", declaration=declaration)
        self.bundle = bundle


class UnknownParameter(StackBuildError):  # noqa: N818
    """A catalog entry references an ambient parameter with no value."""

    def __init__(self, parameter: str, fragment: str) -> None:
        super().__init__(
            f"Fragment '{fragment}' references undefined parameter '${{{parameter}}}'."
        )
        self.parameter = parameter
        self.fragment = fragment


class DuplicateRole(StackBuildError):  # noqa: N818
    """A declaration conflicts with a role another declaration already owns.

    The first declaration naming a role owns it and fixes its permissions.
    Later declarations may share an explicitly named role only when they
    declare no bundles, grants or fragments of their own. A derived role name
    (``<function>-role``) is never shared.
    """

    def __init__(
        self,
        role: str,
        owner: Optional[str] = None,
        *,
        derived: bool = False,
        declaration: Optional[str] = None,
    ) -> None:
        owned_by = f" owned by '{owner}'" if owner else ""
        if derived:
            message = (
                f"Derived role name '{role}' collides with the role{owned_by}. "
                "Give this function an explicit 'role'."
            )
        else:
            message = (
                f"Role '{role}' is already composed{owned_by}. Later declarations "
                "may share it but cannot add bundles, grants or fragments."
            )
        super().__init__(message, declaration=declaration)
        self.role = role
        self.owner = owner
        self.derived = derived


class InvalidPath(StackBuildError):  # noqa: N818
    """A logical path does not follow the lowercase-hyphenated segment syntax."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Invalid path '{path}': {reason}")
        self.path = path


class InvalidMethod(StackBuildError):  # noqa: N818
    """An HTTP verb is not one the gateway accepts."""

    def __init__(self, verb: str, path: str = "") -> None:
        where = f" on '{path}'" if path else ""
        super().__init__(f"Unsupported HTTP method '{verb}'{where}.")
        self.verb = verb
        self.path = path


class DuplicateMethod(StackBuildError):  # noqa: N818
    """A verb is bound twice on the same resource node."""

    def __init__(self, verb: str, path: str, *, declaration: Optional[str] = None) -> None:
        super().__init__(
            f"Method {verb} is already bound on '/{path}'.", declaration=declaration
        )
        self.verb = verb
        self.path = path


class MissingAuthorizer(StackBuildError):  # noqa: N818
    """A TOKEN_BASED binding was declared without an authorizer."""

    def __init__(self, verb: str, path: str, *, declaration: Optional[str] = None) -> None:
        super().__init__(
            f"Method {verb} on '/{path}' uses TOKEN_BASED authorization "
            "but names no authorizer.",
            declaration=declaration,
        )
        self.verb = verb
        self.path = path


class InvalidBudget(StackBuildError):  # noqa: N818
    """Memory or timeout is outside the provider limits."""

    def __init__(self, function: str, reason: str) -> None:
        super().__init__(f"Invalid resource budget for '{function}': {reason}")
        self.function = function


class DuplicateFunctionName(StackBuildError):  # noqa: N818
    """A deployable unit with the same name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Function '{name}' is already registered.")
        self.name = name


class NotFound(StackBuildError):  # noqa: N818
    """A lookup by name or path found nothing."""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"No {kind} named '{key}'.")
        self.kind = kind
        self.key = key
