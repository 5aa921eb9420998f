"""Finance dashboard orchestration layer.

Tab routing, per-view loading aggregation and the dashboard workflows that
sit between the data bindings and the presentation layer.
"""
