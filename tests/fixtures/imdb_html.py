"""
Pages HTML simulees de la recherche IMDb (/find?q=...&s=tt).

Structure reduite a ce que l'analyse utilise : un element
.find-result-item par resultat, le lien de titre et la liste des
informations (annee puis type).
"""

IMDB_FIND_HTML = """
<html><body>
<section data-testid="find-results-section-title">
<ul class="ipc-metadata-list">
  <li class="ipc-metadata-list-summary-item find-result-item">
    <img class="ipc-image" src="https://m.media-amazon.com/images/M/brat.jpg"
         srcset="https://m.media-amazon.com/images/M/brat_UX45.jpg 45w, https://m.media-amazon.com/images/M/brat_UX90.jpg 90w">
    <div class="ipc-metadata-list-summary-item__c">
      <a class="ipc-metadata-list-summary-item__t" href="/title/tt0118767/?ref_=fn_al_tt_1">Brat</a>
      <ul class="ipc-inline-list">
        <li class="ipc-inline-list__item">1997</li>
      </ul>
    </div>
  </li>
  <li class="ipc-metadata-list-summary-item find-result-item">
    <div class="ipc-metadata-list-summary-item__c">
      <a class="ipc-metadata-list-summary-item__t" href="/title/tt2396135/?ref_=fn_al_tt_2">Kukhnya</a>
      <ul class="ipc-inline-list">
        <li class="ipc-inline-list__item">2012–2016</li>
        <li class="ipc-inline-list__item">TV Series</li>
      </ul>
    </div>
  </li>
  <li class="ipc-metadata-list-summary-item find-result-item">
    <div class="ipc-metadata-list-summary-item__c">
      <a class="ipc-metadata-list-summary-item__t" href="/name/nm0092207/">Sergei Bodrov</a>
    </div>
  </li>
</ul>
</section>
</body></html>
"""

IMDB_FIND_EMPTY_HTML = "<html><body><p>No results found</p></body></html>"
