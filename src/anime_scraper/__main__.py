from anime_scraper.cli import main

main()
