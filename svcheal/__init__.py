"""svcheal: make sure named services are running.

Run-once operations helper for deployment pipelines:
 - waits a configurable delay so a deployment can settle
 - restarts each running service, starts stopped ones when asked to
 - verifies every action by re-reading the service state
 - folds per-service results into one exit code (0 / 2 / 11)

Service managers are pluggable: systemd, docker containers, Windows SCM.
"""
