"""Small pure helpers shared by the compiler and the directive processor."""
