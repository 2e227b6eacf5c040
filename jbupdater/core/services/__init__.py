"""
Updater services — the building blocks of an update run.

    permissions   octal permission strings → file modes
    archive       .tar.gz extraction with top-level directory stripping
    decision      installed-vs-candidate build ordering
    catalog       candidate build lookup (JSON endpoint or XML feed)
    download      archive download over HTTP
    orchestrator  the per-product workflow tying them together
"""
