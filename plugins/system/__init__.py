# plugins/system/__init__.py
CATEGORY_DESCRIPTION = "Device, platform and clock information."
