"""Host adapters exposing table definitions to osquery."""
