"""
Core functionality exports for cpkeeper.

    from cpkeeper.core import ClasspathTask, ClasspathTaskOptions
"""

from __future__ import annotations

from cpkeeper.core.codec import decode, encode, read_classpath_file, write_classpath_file
from cpkeeper.core.conflicts import detect_conflicts
from cpkeeper.core.filter import apply_global_exclusions, filter_dependencies
from cpkeeper.core.launcher import build_java_command, launch
from cpkeeper.core.relativizer import relativize
from cpkeeper.core.resolver import Classpath, ClasspathSink, DependencyResolver
from cpkeeper.core.task import ClasspathTask, ClasspathTaskOptions, TaskResult, TaskState

__all__ = [
    "Classpath",
    "ClasspathSink",
    "ClasspathTask",
    "ClasspathTaskOptions",
    "DependencyResolver",
    "TaskResult",
    "TaskState",
    "apply_global_exclusions",
    "build_java_command",
    "decode",
    "detect_conflicts",
    "encode",
    "filter_dependencies",
    "launch",
    "read_classpath_file",
    "relativize",
    "write_classpath_file",
]
