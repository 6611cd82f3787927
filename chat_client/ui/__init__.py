"""NiceGUI interface - thin projection of the session controller.

Responsibilities:
    - Login form prefilled from browser storage
    - Conversation sidebar with switch and delete affordances
    - Incremental rendering of streamed replies
    - Inline field errors and transient notifications

Contains no session logic. Maps gestures to controller operations and
controller render commands to widgets.
"""
