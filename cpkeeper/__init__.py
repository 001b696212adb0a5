"""
cpkeeper: a Java classpath kept as a file.

cpkeeper resolves a declared set of Maven dependencies once and stores the
resulting artifact paths in a flat file that ``java -cp`` accepts directly.
Later runs read that file back instead of resolving again, so the
classpath is cacheable, inspectable and diffable.

Features include:
    • Scope filtering and global exclusions before resolution
    • Detection of transitive version conflicts the caller has not settled
    • Paths relative to a project-local artifact stash
    • Atomic classpath file writes
"""

from __future__ import annotations

from cpkeeper.__version__ import __version__

__author__ = "cpkeeper Contributors"
__license__ = "Apache-2.0"
__description__ = "Resolve a Java classpath once and keep it in a file."

__all__ = [
    "__version__",
]
