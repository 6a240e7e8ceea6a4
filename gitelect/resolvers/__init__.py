"""Branch resolvers: the ancestry cache builder and the server branch elector."""

# Lazy re-exports: import only when the package itself is imported (not when
# individual modules are run via `python -m`), which prevents a harmless but
# noisy RuntimeWarning from runpy.
from importlib import import_module as _im


def __getattr__(name: str):  # noqa: N807
    _map = {
        "build_commits_cache": ("ancestry", "build_commits_cache"),
        "load_ancestry": ("ancestry", "load_ancestry"),
        "walk_ancestry": ("ancestry", "walk_ancestry"),
        "elect_server_branch": ("elector", "elect_server_branch"),
        "explain_election": ("elector", "explain_election"),
        "elect_for_directory": ("elector", "elect_for_directory"),
    }
    if name in _map:
        mod_name, attr = _map[name]
        mod = _im(f"gitelect.resolvers.{mod_name}")
        return getattr(mod, attr)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "build_commits_cache",
    "load_ancestry",
    "walk_ancestry",
    "elect_server_branch",
    "explain_election",
    "elect_for_directory",
]
