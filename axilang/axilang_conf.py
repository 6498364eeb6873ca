# axilang_conf.py
# Part of AxiLang, a scripting language for the AxiDraw
#
# Copyright 2026 The AxiLang Authors
#
# "Change numbers here, not there." :)


'''
Default configuration values for AxiLang.

These values are used as defaults by the command line interface and by the
AxiLang classes when no other parameters are given. With the CLI, you can
make a copy of this file, edit it, and pass it with the --config option.
Settings given on the command line override those in any configuration file.

'''

# DEFAULT VALUES

debug = False           # Report debug messages. Default False

# Downloading plot files given as URLs:

max_redirects = 5       # Maximum number of HTTP redirects to follow. Default 5
fetch_timeout = 30      # Timeout for each HTTP request (s). None waits indefinitely.
                            # Default 30
user_agent = 'axilang/1.2.0'    # User-Agent header sent with HTTP requests
temp_prefix = 'axilang-'        # Filename prefix of downloaded plot files
keep_downloads = False  # Keep downloaded plot files after the session ends.
                            # Default False

# Interactive session:

prompt = 'AxiLang>> '               # Prompt for a new command
continuation_prompt = '...>> '      # Prompt while an OPTS or UOPTS block is open
