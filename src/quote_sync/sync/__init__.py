"""
Sync coordination subsystem.

Components:
- models.py: data structures (SyncTask, Page, PushResult, QueueStatus)
- rate_limiter.py: one-minute sliding window over device calls
- dedup_cache.py: bounded set of processed webhook event ids
- paginator.py: clock-driven page selection + message rendering
- task_queue.py: single-flight queue with a forced lane
- orchestrator.py: fetch -> paginate -> push for one task
- coordinator.py: per-process wiring and trigger entry points
- scheduler.py: recurring trigger loop
"""
