"""Chat: streaming transcript assembly and sessions."""
