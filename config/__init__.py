"""Environment-driven settings for Blend In."""
