"""
tabledit: pending mutation tracking and SQL statement synthesis for table views

Subpackages:
- codec: cell value <-> edit text <-> SQL literal conversions
- tracker: changeset store of pending inserts, updates and deletes
- synthesizer: INSERT/UPDATE/DELETE generation from a changeset
- commit: commit coordination and backend collaborators
- session: snapshot/changeset coupling for one table view
- cli: `tabledit` command line
"""

__version__ = "1.0.0"
__all__ = ["codec", "tracker", "synthesizer", "commit", "session", "cli", "config", "exceptions"]
