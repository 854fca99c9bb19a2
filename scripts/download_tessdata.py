import argparse
import sys
from pathlib import Path

from plate_reader.ocr_recognition import EngineConfigError, download_lang_file


def main():
    parser = argparse.ArgumentParser(description='Download tesseract language data for plate recognition')
    parser.add_argument('--out', default=str(Path('tessdata')), help='Destination folder')
    parser.add_argument('--lang', action='append', default=None,
                        help='Language to fetch (repeatable, default: eng and osd)')
    args = parser.parse_args()

    langs = args.lang or ['eng', 'osd']
    for lang in langs:
        try:
            path = download_lang_file(args.out, lang)
        except EngineConfigError as e:
            print(e)
            sys.exit(1)
        print(f'{lang}: {path}')
    print('Done.')


if __name__ == '__main__':
    main()
