"""SmallyFit — personal fitness tracking backend."""
