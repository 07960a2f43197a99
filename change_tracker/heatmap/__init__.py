"""Calendar heatmap of registry change activity.

This package provides:
- Day-by-day bucketing of add/change/delete events over a trailing window
- Grid geometry that adapts to the available container width
- SVG rendering with split cells for days with several kinds of activity
- Tooltip text and a view controller that mirrors the console component

Everything here is synchronous and side-effect free apart from the
period-change notifier and the in-process event bus.
"""
