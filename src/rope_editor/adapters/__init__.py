"""Host adapters driving the buffer layer."""
