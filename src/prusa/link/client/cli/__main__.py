from prusa.link.client.cli.main import main

main()
