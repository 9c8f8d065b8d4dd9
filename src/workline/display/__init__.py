"""Display-side QR controller (kiosk/HR screen)."""
