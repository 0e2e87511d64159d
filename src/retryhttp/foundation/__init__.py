"""Foundation layer: errors, results and configuration."""
