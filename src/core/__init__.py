"""Core domain package for autotagger.

Core contains trigger matching, the tagging rule, and the save/backfill
orchestration without any storage or HTTP-specific code, keeping the business
logic portable.
"""
