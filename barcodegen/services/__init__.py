"""Business services for identifier allocation, sessions and exports."""
