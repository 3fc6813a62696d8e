"""Eclipse of Empires: a hex strategy game engine with bluffing AI empires."""
