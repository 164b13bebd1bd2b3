"""Hook logic for reviewgate: settings, event logging and review triggering."""
