"""Change detection and notifications for recurring scans."""
