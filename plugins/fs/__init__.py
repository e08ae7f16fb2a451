# plugins/fs/__init__.py
CATEGORY_DESCRIPTION = "Browse and read files in the working directory."
