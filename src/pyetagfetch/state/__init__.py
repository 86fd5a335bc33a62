"""Endpoint cache state and freshness policy.

Everything here is pure: the fetcher owns the mutable references and
replaces the state model wholesale, so no partially updated state is ever
observable.
"""
