"""Schema tooling: field mapping, migration helpers and drift checks"""
