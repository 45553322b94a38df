"""Element tree compiler, capability table and JSX printer."""
