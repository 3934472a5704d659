"""
Platform layer for talking to the local operating system.

Process execution, account database lookups and file writes live here;
the syncers build their operations on top of these.
"""
