"""Project module - .dproj reading and artifact path resolution."""

from dccsift.project.dproj import ProjectFile
from dccsift.project.resolver import ArtifactResolver, find_compiler_invocation
from dccsift.project.scoping import Priority, ScopedProperty, resolve_scoped_property
from dccsift.project.variables import resolve_env_vars, resolve_variables

__all__ = [
    "ArtifactResolver",
    "Priority",
    "ProjectFile",
    "ScopedProperty",
    "find_compiler_invocation",
    "resolve_env_vars",
    "resolve_scoped_property",
    "resolve_variables",
]
