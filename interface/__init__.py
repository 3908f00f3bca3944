"""Host adapters: terminal play, UCI and REST."""
