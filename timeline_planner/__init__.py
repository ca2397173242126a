"""Interactive project timeline with drag-to-reschedule task bars."""
