"""
Helper tools to test the code built on top of the aggregating client.

This module is a part of the library's public interface.
"""
from clientaggregator._kits.fakes import FakeClient, FakeSubResourceClient, FakeWatcher

__all__ = [
    'FakeClient',
    'FakeSubResourceClient',
    'FakeWatcher',
]
