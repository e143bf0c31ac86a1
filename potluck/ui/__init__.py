"""
Desktop user interface.

Widget modules import customtkinter; ``potluck.ui.projection`` does not and
can be used without a display.
"""
