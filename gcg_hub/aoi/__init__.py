"""
Areas of improvement (AOI): a local JSON key-value store, separate from the
relational compliance data, with a subscription hook and a ``flask aoi`` CLI.
"""
