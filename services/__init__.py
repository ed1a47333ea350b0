"""Services package.

Reusable, non-UI logic lives here: data models, the calculation engine,
calculation sessions, product catalog, challan/return line rules and file
persistence. Keep UI code out of here.
"""
