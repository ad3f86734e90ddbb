"""Command-stack engine core: typed flags, a single-instance guard, a virtual machine and a job queue."""

__version__ = "0.1.0"
__all__ = ["flags", "instances", "engine", "jobs"]