# daykanban: rich text and time tracking engines for day-keyed Kanban boards
#
# Components:
#   schema.py       - Data model (Card, CardMovement, Column, TimeBreakdown)
#   markers.py      - Formatting marker vocabulary
#   richtext.py     - Description parser (string → node tree)
#   render.py       - Read / overlay / plain-text renderers
#   editing.py      - Cursor-aware edit operations (wrap, bullets, marker deletion)
#   timetracking.py - Time-in-column accounting over the movement log
#   stats.py        - Dashboard statistics across cards
#   formatters.py   - Duration / date / time display strings
#   validators.py   - Input sanitisation and validation
#   config.py       - YAML configuration
