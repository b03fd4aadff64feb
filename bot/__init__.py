"""Chat command handling for the dogebot backend."""
