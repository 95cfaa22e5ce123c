"""Testing utilities for LazyTreeLib consumers."""

from .fixtures import InMemoryNodeSource, NotificationRecorder, sample_source

__all__ = ['InMemoryNodeSource', 'NotificationRecorder', 'sample_source']
