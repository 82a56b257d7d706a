from asdfplug.cli import main

main()
