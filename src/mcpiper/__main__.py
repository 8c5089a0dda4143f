from mcpiper.cli import main

main()
