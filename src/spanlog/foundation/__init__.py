"""Foundation: errors and configuration shared by the logging and tracing layers."""
