"""Точка входа в приложение."""
import logging

from texture_stacker.app import TextureStackerApp


def main() -> None:
    """Создаёт и запускает главное окно приложения."""
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    app = TextureStackerApp()
    app.mainloop()


if __name__ == "__main__":
    main()
