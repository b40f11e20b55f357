"""Study library: notes, PDF references, media links and text snippets."""
