#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# translation_utils.py - Utilities for translation support
#
import gettext
import os

# Default for system install
locale_dir = "/usr/share/locale"

# Bundled builds ship their catalogs next to the package data
if "FOLDERTERM_LOCALE_DIR" in os.environ:
    override = os.environ["FOLDERTERM_LOCALE_DIR"]
    if os.path.isdir(override):
        locale_dir = override

gettext.bindtextdomain("folderterm", locale_dir)
gettext.textdomain("folderterm")

_ = gettext.gettext
