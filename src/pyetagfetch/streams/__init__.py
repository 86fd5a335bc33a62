"""Push streams used by the fetcher and the data loaders."""

from pyetagfetch.streams.polling import PollingSubject
from pyetagfetch.streams.subject import Subject, Subscription, ValueSubject

__all__ = ["PollingSubject", "Subject", "Subscription", "ValueSubject"]
